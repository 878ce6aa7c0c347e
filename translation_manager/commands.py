"""Operator commands, available as ``flask translations <command>``."""

import json

import click
from flask.cli import AppGroup

from translation_manager.exceptions import StoreUnavailableError
from translation_manager.services import maintenance
from translation_manager.services.form_loader import load_form_file
from translation_manager.services.scanner import Scanner

translations_cli = AppGroup('translations', help='Capture and maintain translation records.')


def _print_report(report, title: str) -> None:
    click.echo(f"\n{title}:")
    click.echo(f"  Sources scanned: {report.scanned_sources}")
    if report.skipped_sources:
        click.echo(f"  Sources skipped: {report.skipped_sources}")
    click.echo(f"  Strings found: {report.extracted_strings}")
    click.echo(f"  Created: {report.created}")
    click.echo(f"  Reactivated: {report.reactivated}")
    click.echo(f"  Marked unused: {report.marked_unused}")
    click.echo(f"  Errors: {report.error_count}")

    if report.errors:
        click.echo("\nErrors encountered:")
        for error in report.errors[:5]:  # Show first 5 errors
            click.echo(f"  - {error}")
        if report.error_count > 5:
            click.echo(f"  ... and {report.error_count - 5} more")


def _run(action):
    try:
        return action()
    except StoreUnavailableError as e:
        raise click.ClickException(str(e))


@translations_cli.command('scan-templates')
@click.option('--path', 'paths', multiple=True, type=click.Path(exists=True, dir_okay=False),
              help='Scan only these template files (no usage check)')
@click.option('--json', 'as_json', is_flag=True, help='Print the report as JSON')
def scan_templates(paths, as_json):
    """Capture template strings and mark strings no longer used."""
    scanner = Scanner.from_app()
    report = _run(lambda: scanner.scan_templates(list(paths) or None))

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        _print_report(report, 'Template scan complete')
        if report.marked_unused:
            click.echo("\nRemove unused translations with: flask translations clean-unused --type site")


@translations_cli.command('preview-scan')
def preview_scan():
    """Show what a template scan would capture, without writing."""
    scanner = Scanner.from_app()
    found, report = scanner.preview_templates()

    click.echo(f"Scanned {report.scanned_sources} templates")
    for category in sorted(found):
        click.echo(f"\n[{category}] {len(found[category])} strings")
        for text, origin in sorted(found[category].items()):
            click.echo(f"  {text[:60]!r}  ({origin})")

    for error in report.errors:
        click.echo(f"  ! {error}", err=True)


@translations_cli.command('capture-forms')
@click.option('--form', 'form_files', multiple=True, type=click.Path(exists=True, dir_okay=False),
              help='Capture only these form files (no usage check)')
def capture_forms(form_files):
    """Capture strings from every form and mark form strings no longer used."""
    scanner = Scanner.from_app()

    if form_files:
        def action():
            context = scanner.new_context()
            for path in form_files:
                scanner.capture_form(load_form_file(path), context)
            return context.report
        report = _run(action)
    else:
        report = _run(scanner.scan_forms)

    _print_report(report, 'Form capture complete')


@translations_cli.command('check-form-usage')
def check_form_usage():
    """Mark form strings unused when no form produces them any more."""
    scanner = Scanner.from_app()
    report = _run(scanner.check_form_usage)
    _print_report(report, 'Form usage check complete')


@translations_cli.command('clean-unused')
@click.option('--type', 'scope_type', type=click.Choice(maintenance.SCOPE_TYPES), default='all',
              show_default=True, help='Which translations to clean')
@click.option('--yes', is_flag=True, help='Do not ask for confirmation')
def clean_unused(scope_type, yes):
    """Delete translations marked unused."""
    scanner = Scanner.from_app()
    if not yes:
        click.confirm(f"Delete all unused {scope_type} translations?", abort=True)
    deleted = _run(lambda: maintenance.clean_unused(scanner.store, scanner.settings, scope_type))
    click.echo(f"Deleted {deleted} unused {scope_type} translations.")


@translations_cli.command('apply-skip-patterns')
@click.option('--yes', is_flag=True, help='Do not ask for confirmation')
def apply_skip_patterns(yes):
    """Delete site translations whose text matches a skip pattern."""
    scanner = Scanner.from_app()
    if not scanner.settings.skip_patterns:
        click.echo("No skip patterns configured.")
        return

    matches = _run(lambda: maintenance.find_skip_pattern_matches(scanner.store, scanner.settings))
    if not matches:
        click.echo("No translations match the skip patterns.")
        return

    if not yes:
        click.confirm(f"Delete {len(matches)} translations matching skip patterns?", abort=True)
    deleted = _run(lambda: maintenance.apply_skip_patterns(scanner.store, scanner.settings))
    click.echo(f"Deleted {deleted} translations matching skip patterns.")


@translations_cli.command('stats')
@click.option('--json', 'as_json', is_flag=True, help='Print statistics as JSON')
def stats(as_json):
    """Translation counts per status and type."""
    scanner = Scanner.from_app()
    statistics = _run(lambda: maintenance.get_statistics(scanner.store, scanner.settings))

    if as_json:
        click.echo(json.dumps(statistics, indent=2))
        return

    for scope_type, counts in statistics.items():
        parts = ', '.join(f"{status}: {count}" for status, count in counts.items())
        click.echo(f"{scope_type:<6} {parts}")


def register_commands(app):
    app.cli.add_command(translations_cli)
