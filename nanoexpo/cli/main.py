#!/usr/bin/env python3
"""
Nano Exhibition Manager Terminal CLI
Command-line interface for all store operations, one command group per view.
"""

import logging
from datetime import datetime

import click

from nanoexpo.db.storage import get_storage
from nanoexpo.engine import dashboard as dash
from nanoexpo.engine import export as exporter
from nanoexpo.engine.store import ExhibitionStore, always_confirm
from nanoexpo.logging_config import configure_logging, log_call
from nanoexpo.models import ATTENDEE_TYPES, field_names

_DATETIME_FORMAT = '%Y-%m-%dT%H:%M'


def _validate_datetime(ctx, param, value):
    """Accept blank, 'YYYY-MM-DDTHH:MM' or 'YYYY-MM-DD HH:MM'; store the T form."""
    if value is None or not value.strip():
        return value
    raw = value.strip().replace(' ', 'T', 1)
    try:
        datetime.strptime(raw, _DATETIME_FORMAT)
    except ValueError:
        logging.getLogger("nanoexpo").debug(f"_validate_datetime | rejected input={value!r}")
        raise click.BadParameter("please use YYYY-MM-DDTHH:MM (e.g. 2025-11-12T10:00)")
    return raw


@click.group()
@click.option('--storage', 'storage_path', type=click.Path(dir_okay=False),
              help='Storage file (default: STORAGE_PATH from .env)')
@click.option('--verbose', is_flag=True, help='Echo log lines to stderr')
@click.pass_context
def cli(ctx, storage_path, verbose):
    """Nano Exhibition Manager - exhibitors, booths, schedule & attendees"""
    configure_logging(verbose=verbose)
    ctx.obj = ExhibitionStore.open(get_storage(storage_path), confirm=click.confirm)


# =============================================================================
# SHARED COMMANDS (list / show / delete / copy-json on every collection)
# =============================================================================

_LIST_LAYOUT = {
    'exhibitors': [('ID', 'id', 12), ('Name', 'name', 28), ('Booth', 'booth', 8), ('Contact', 'contact', 28)],
    'booths': [('ID', 'id', 12), ('Code', 'code', 8), ('Size', 'size', 8), ('Notes', 'notes', 40)],
    'events': [('ID', 'id', 12), ('Title', 'title', 26), ('Start', 'start', 17), ('End', 'end', 17), ('Location', 'location', 16)],
    'attendees': [('ID', 'id', 12), ('Name', 'name', 22), ('Type', 'type', 10), ('Company', 'company', 20), ('Email', 'email', 24)],
}


def _print_table(collection, records):
    layout = _LIST_LAYOUT[collection]
    header = " ".join(f"{label:<{width}}" for label, _, width in layout)
    click.echo(header)
    click.echo("-" * len(header))
    for record in records:
        click.echo(" ".join(
            f"{getattr(record, key)[:width - 2]:<{width}}" for _, key, width in layout
        ))


def _add_shared_commands(group, collection):
    singular = collection[:-1]

    @group.command('list', help=f"List {collection}")
    @click.option('--search', '-q', default='', help='Case-insensitive text search')
    @click.pass_obj
    @log_call
    def list_cmd(store, search):
        results = store.filter(collection, search)
        if not results:
            click.echo(f"No {collection} match.")
            return
        click.echo(f"\nFound {len(results)} {collection}:\n")
        _print_table(collection, results)

    @group.command('show', help=f"Show one {singular} in full")
    @click.argument('record_id')
    @click.pass_obj
    @log_call
    def show_cmd(store, record_id):
        record = store.repository(collection).get(record_id)
        if record is None:
            logging.getLogger("nanoexpo").warning(f"{collection} show | id={record_id} not found")
            click.echo(f"{singular.capitalize()} {record_id} not found.", err=True)
            return
        click.echo(f"\n{'=' * 60}")
        click.echo(f"{singular.upper()} {record.id}")
        click.echo(f"{'=' * 60}")
        for name in field_names(type(record)):
            if name != 'id':
                click.echo(f"{name.capitalize() + ':':<12} {getattr(record, name) or '(not set)'}")
        click.echo()

    @group.command('delete', help=f"Delete a {singular} (asks for confirmation)")
    @click.argument('record_id')
    @click.option('--yes', is_flag=True, help='Skip the confirmation prompt')
    @click.pass_obj
    @log_call
    def delete_cmd(store, record_id, yes):
        repo = store.repository(collection)
        if repo.get(record_id) is None:
            logging.getLogger("nanoexpo").warning(f"{collection} delete | id={record_id} not found")
            click.echo(f"{singular.capitalize()} {record_id} not found.", err=True)
            return
        if yes:
            store.confirm = always_confirm
        if repo.remove(record_id):
            click.echo(f"✓ Deleted {singular} {record_id}")
        else:
            click.echo("Cancelled.")

    @group.command('copy-json', help=f"Copy the (filtered) {collection} list to the clipboard as JSON")
    @click.option('--search', '-q', default='', help='Copy only records matching this search')
    @click.pass_obj
    @log_call
    def copy_cmd(store, search):
        results = store.filter(collection, search)
        if exporter.copy_json(results):
            click.echo(f"✓ Copied {len(results)} {collection} as JSON")
        else:
            click.echo("Clipboard unavailable - nothing copied.", err=True)


def _run_add(store, collection, values):
    try:
        record = store.repository(collection).add(values)
    except ValueError as e:
        logging.getLogger("nanoexpo").warning(f"{collection} add rejected: {e}")
        click.echo(f"Error: {e}", err=True)
        return
    name_field = store.repository(collection).name_field
    click.echo(f"\n✓ Added {collection[:-1]} {record.id}: {getattr(record, name_field)}")


def _run_edit(store, collection, record_id, updates):
    updates = {k: v for k, v in updates.items() if v is not None}
    if not updates:
        fields = ", ".join(f"--{k}" for k in field_names(store.repository(collection).record_cls) if k != 'id')
        click.echo(f"No updates specified. Use {fields}", err=True)
        return
    if store.repository(collection).update(record_id, updates):
        click.echo(f"✓ Updated {collection[:-1]} {record_id}")
    else:
        logging.getLogger("nanoexpo").warning(f"{collection} edit | id={record_id} not found")
        click.echo(f"{collection[:-1].capitalize()} {record_id} not found", err=True)


# =============================================================================
# DASHBOARD
# =============================================================================

@cli.command('dashboard')
@click.pass_obj
@log_call
def dashboard(store):
    """Overview counts and latest registrations"""
    counts = dash.overview(store.data)
    click.echo(f"\n{'=' * 40}")
    click.echo("OVERVIEW")
    click.echo(f"{'=' * 40}")
    click.echo(f"Exhibitors:     {counts['exhibitors']}")
    click.echo(f"Booths:         {counts['booths']}")
    click.echo(f"Schedule items: {counts['events']}")
    click.echo(f"Attendees:      {counts['attendees']}")

    click.echo(f"\n{'=' * 40}")
    click.echo("LATEST REGISTRATIONS")
    click.echo(f"{'=' * 40}")
    latest = dash.latest_registrations(store.data)
    if not latest:
        click.echo("No registrations yet.")
    for a in latest:
        click.echo(f"{a.name}")
        click.echo(f"  {a.company} • {a.type}")
    click.echo()


# =============================================================================
# EXHIBITORS
# =============================================================================

@cli.group()
def exhibitors():
    """Manage exhibitors"""
    pass


_add_shared_commands(exhibitors, 'exhibitors')


@exhibitors.command('add')
@click.option('--name', prompt='Name', help='Exhibitor name (required)')
@click.option('--contact', prompt='Contact', default='', show_default=False)
@click.option('--booth', prompt='Booth code', default='', show_default=False)
@click.option('--notes', prompt='Notes', default='', show_default=False)
@click.pass_obj
@log_call
def exhibitors_add(store, name, contact, booth, notes):
    """Add a new exhibitor"""
    _run_add(store, 'exhibitors', {'name': name, 'contact': contact, 'booth': booth, 'notes': notes})


@exhibitors.command('edit')
@click.argument('record_id')
@click.option('--name', help='Update name')
@click.option('--contact', help='Update contact')
@click.option('--booth', help='Update booth code')
@click.option('--notes', help='Update notes')
@click.pass_obj
@log_call
def exhibitors_edit(store, record_id, name, contact, booth, notes):
    """Edit an exhibitor (use options to set fields)"""
    _run_edit(store, 'exhibitors', record_id, {'name': name, 'contact': contact, 'booth': booth, 'notes': notes})


# =============================================================================
# BOOTHS
# =============================================================================

@cli.group()
def booths():
    """Manage booths"""
    pass


_add_shared_commands(booths, 'booths')


@booths.command('add')
@click.option('--code', prompt='Code (e.g. A1)', help='Booth code (required)')
@click.option('--size', prompt='Size', default='', show_default=False)
@click.option('--notes', prompt='Notes', default='', show_default=False)
@click.pass_obj
@log_call
def booths_add(store, code, size, notes):
    """Add a new booth"""
    _run_add(store, 'booths', {'code': code, 'size': size, 'notes': notes})


@booths.command('edit')
@click.argument('record_id')
@click.option('--code', help='Update code')
@click.option('--size', help='Update size')
@click.option('--notes', help='Update notes')
@click.pass_obj
@log_call
def booths_edit(store, record_id, code, size, notes):
    """Edit a booth (use options to set fields)"""
    _run_edit(store, 'booths', record_id, {'code': code, 'size': size, 'notes': notes})


# =============================================================================
# SCHEDULE
# =============================================================================

@cli.group()
def events():
    """Manage the schedule"""
    pass


_add_shared_commands(events, 'events')


@events.command('add')
@click.option('--title', prompt='Title', help='Event title (required)')
@click.option('--start', prompt='Start (YYYY-MM-DDTHH:MM)', default='', show_default=False,
              callback=_validate_datetime)
@click.option('--end', prompt='End (YYYY-MM-DDTHH:MM)', default='', show_default=False,
              callback=_validate_datetime)
@click.option('--location', prompt='Location', default='', show_default=False)
@click.option('--speaker', prompt='Speaker', default='', show_default=False)
@click.pass_obj
@log_call
def events_add(store, title, start, end, location, speaker):
    """Add a schedule item"""
    _run_add(store, 'events', {
        'title': title, 'start': start, 'end': end, 'location': location, 'speaker': speaker,
    })


@events.command('edit')
@click.argument('record_id')
@click.option('--title', help='Update title')
@click.option('--start', callback=_validate_datetime, help='Update start (YYYY-MM-DDTHH:MM)')
@click.option('--end', callback=_validate_datetime, help='Update end (YYYY-MM-DDTHH:MM)')
@click.option('--location', help='Update location')
@click.option('--speaker', help='Update speaker')
@click.pass_obj
@log_call
def events_edit(store, record_id, title, start, end, location, speaker):
    """Edit a schedule item (use options to set fields)"""
    _run_edit(store, 'events', record_id, {
        'title': title, 'start': start, 'end': end, 'location': location, 'speaker': speaker,
    })


# =============================================================================
# ATTENDEES
# =============================================================================

@cli.group()
def attendees():
    """Manage attendee registrations"""
    pass


_add_shared_commands(attendees, 'attendees')


@attendees.command('add')
@click.option('--name', prompt='Full name', help='Attendee name (required)')
@click.option('--company', prompt='Company', default='', show_default=False)
@click.option('--email', prompt='Email', default='', show_default=False)
@click.option('--type', 'type_', prompt='Type',
              type=click.Choice(ATTENDEE_TYPES, case_sensitive=False), default='Visitor')
@click.pass_obj
@log_call
def attendees_add(store, name, company, email, type_):
    """Register an attendee"""
    _run_add(store, 'attendees', {'name': name, 'company': company, 'email': email, 'type': type_})


@attendees.command('edit')
@click.argument('record_id')
@click.option('--name', help='Update name')
@click.option('--company', help='Update company')
@click.option('--email', help='Update email')
@click.option('--type', 'type_', type=click.Choice(ATTENDEE_TYPES, case_sensitive=False), help='Update type')
@click.pass_obj
@log_call
def attendees_edit(store, record_id, name, company, email, type_):
    """Edit an attendee (use options to set fields)"""
    _run_edit(store, 'attendees', record_id, {'name': name, 'company': company, 'email': email, 'type': type_})


# =============================================================================
# EXPORT
# =============================================================================

@cli.group('export')
def export_group():
    """Export data as CSV or JSON"""
    pass


@export_group.command('csv')
@click.argument('collection', type=click.Choice(sorted(exporter.CSV_PRESETS)))
@click.option('--output-dir', type=click.Path(file_okay=False), help='Directory (default: EXPORT_DIR)')
@click.pass_obj
@log_call
def export_csv(store, collection, output_dir):
    """Export exhibitors or attendees to export_<timestamp>.csv"""
    records = store.repository(collection).list()
    path = exporter.export_csv(records, exporter.CSV_PRESETS[collection], output_dir)
    click.echo(f"✓ Exported {len(records)} {collection} to {path}")


@export_group.command('copy-json')
@click.pass_obj
@log_call
def export_copy_json(store):
    """Copy the full data set to the clipboard as JSON"""
    if exporter.copy_json(store.data):
        click.echo("✓ Full data copied to clipboard")
    else:
        click.echo("Clipboard unavailable - nothing copied.", err=True)


# =============================================================================
# SETTINGS
# =============================================================================

@cli.group()
def settings():
    """Reset or back up the data set"""
    pass


@settings.command('reset')
@click.option('--yes', is_flag=True, help='Skip the confirmation prompt')
@click.pass_obj
@log_call
def settings_reset(store, yes):
    """Reset to sample data (overwrites everything)"""
    if yes:
        store.confirm = always_confirm
    if store.reset():
        click.echo("✓ Data reset to sample data")
    else:
        click.echo("Cancelled.")


@settings.command('backup')
@click.option('--output-dir', type=click.Path(file_okay=False), help='Directory (default: EXPORT_DIR)')
@click.pass_obj
@log_call
def settings_backup(store, output_dir):
    """Download a JSON backup of all data"""
    path = exporter.write_backup(store.data, output_dir)
    click.echo(f"✓ Backup written to {path}")


# =============================================================================
# MAIN
# =============================================================================

if __name__ == '__main__':
    cli()
