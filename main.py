#!/usr/bin/env python3
"""
Nano Exhibition Manager - Interactive Menu Launcher
Run this file to reach every view through a simple numbered menu.

Usage:
    python main.py
"""

import subprocess
import sys
import os

PYTHON = sys.executable
APP = [PYTHON, "-m", "nanoexpo.cli.main"]

# Project root on PYTHONPATH so 'nanoexpo' package is importable
ENV = os.environ.copy()
ENV["PYTHONPATH"] = os.path.dirname(os.path.abspath(__file__))

# Free-text search shared by every list view (the top-bar search box)
_search = {"q": ""}


def run(args: list[str]):
    """Run a CLI command and return to menu when done."""
    print()
    subprocess.run(APP + args, env=ENV)
    print()
    input("  Press Enter to return to menu...")


def prompt(label: str, required: bool = True) -> str:
    """Prompt user for input. Returns empty string if optional and skipped."""
    while True:
        value = input(f"  {label}: ").strip()
        if value:
            return value
        if not required:
            return ""
        print("  (required - please enter a value)")


def prompt_optional(label: str) -> str:
    return prompt(f"{label} (optional, Enter to skip)", required=False)


def clear():
    os.system("cls" if os.name == "nt" else "clear")


def with_search(args: list[str]) -> list[str]:
    if _search["q"]:
        return args + ["--search", _search["q"]]
    return args


# =============================================================================
# COMMAND HANDLERS
# =============================================================================

def set_search():
    _search["q"] = prompt_optional("Search text (Enter to clear)")


def dashboard():
    run(["dashboard"])


def make_list(collection):
    def handler():
        run(with_search([collection, "list"]))
    return handler


def make_add(collection):
    def handler():
        run([collection, "add"])
    return handler


def make_edit(collection, fields):
    def handler():
        record_id = prompt("ID")
        args = [collection, "edit", record_id]
        for name in fields:
            value = prompt_optional(f"New {name}")
            if value:
                args += [f"--{name}", value]
        run(args)
    return handler


def make_delete(collection):
    def handler():
        run([collection, "delete", prompt("ID")])
    return handler


def copy_exhibitors():
    run(with_search(["exhibitors", "copy-json"]))


def export_exhibitors():
    run(["export", "csv", "exhibitors"])


def export_attendees():
    run(["export", "csv", "attendees"])


def copy_everything():
    run(["export", "copy-json"])


def reset():
    run(["settings", "reset"])


def backup():
    run(["settings", "backup"])


# =============================================================================
# MENU LAYOUT
# =============================================================================

MENU = [
    ("DASHBOARD", [
        ("Overview & latest registrations",  dashboard),
        ("Set search text",                  set_search),
    ]),
    ("EXHIBITORS", [
        ("List exhibitors",                  make_list("exhibitors")),
        ("Add exhibitor",                    make_add("exhibitors")),
        ("Edit exhibitor",                   make_edit("exhibitors", ["name", "contact", "booth", "notes"])),
        ("Delete exhibitor",                 make_delete("exhibitors")),
        ("Copy filtered exhibitors as JSON", copy_exhibitors),
    ]),
    ("BOOTHS", [
        ("List booths",                      make_list("booths")),
        ("Add booth",                        make_add("booths")),
        ("Edit booth",                       make_edit("booths", ["code", "size", "notes"])),
        ("Delete booth",                     make_delete("booths")),
    ]),
    ("SCHEDULE", [
        ("List schedule",                    make_list("events")),
        ("Add schedule item",                make_add("events")),
        ("Edit schedule item",               make_edit("events", ["title", "start", "end", "location", "speaker"])),
        ("Delete schedule item",             make_delete("events")),
    ]),
    ("ATTENDEES", [
        ("List attendees",                   make_list("attendees")),
        ("Register attendee",                make_add("attendees")),
        ("Edit attendee",                    make_edit("attendees", ["name", "company", "email", "type"])),
        ("Delete attendee",                  make_delete("attendees")),
    ]),
    ("EXPORT", [
        ("Export exhibitors CSV",            export_exhibitors),
        ("Export attendees CSV",             export_attendees),
        ("Copy full JSON",                   copy_everything),
    ]),
    ("SETTINGS", [
        ("Reset to sample data",             reset),
        ("Download JSON backup",             backup),
    ]),
]


def print_menu():
    clear()
    print("=" * 50)
    print("   NANO EXHIBITION MANAGER")
    if _search["q"]:
        print(f"   search: {_search['q']}")
    print("=" * 50)

    n = 1
    numbering = {}  # maps display number -> handler function

    for section, commands in MENU:
        print(f"\n  {section}")
        print(f"  {'-' * len(section)}")
        for label, handler in commands:
            print(f"  {n:>2}.  {label}")
            numbering[n] = handler
            n += 1

    print("\n" + "=" * 50)
    print("   0.  Exit")
    print("=" * 50)
    return numbering


def main():
    while True:
        numbering = print_menu()

        try:
            choice = input("\n  Select a command: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\n\n  Goodbye!\n")
            break

        if choice == "0" or choice.lower() in ("q", "quit", "exit"):
            print("\n  Goodbye!\n")
            break

        try:
            n = int(choice)
        except ValueError:
            print("\n  Please enter a number.")
            input("  Press Enter to continue...")
            continue

        if n in numbering:
            clear()
            numbering[n]()
        else:
            print(f"\n  Invalid selection: {choice}")
            input("  Press Enter to continue...")


if __name__ == "__main__":
    main()
