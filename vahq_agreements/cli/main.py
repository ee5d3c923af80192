"""Main CLI application"""

import json
from contextlib import contextmanager
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from vahq_agreements.errors import AgreementEngineError
from vahq_agreements.models.operation import OperationType, StructureOperation
from vahq_agreements.models.structure import CheckboxField, CheckboxGroupField
from vahq_agreements.utils.config import configure_logging

app = typer.Typer(
    name="vahq",
    help="Workflow agreement templates, client customization and sign-off",
    add_completion=False,
)

console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    configure_logging("DEBUG" if verbose else None)


def _service():
    from vahq_agreements.db.supabase import get_database
    from vahq_agreements.services.agreement import AgreementService

    return AgreementService(get_database())


@contextmanager
def _engine_errors():
    """Print engine errors in red and exit non-zero"""
    try:
        yield
    except AgreementEngineError as e:
        console.print(f"[red]{type(e).__name__}: {e}[/red]")
        raise typer.Exit(code=1)


def _print_agreement(agreement) -> None:
    console.print(
        f"[green][OK][/green] {agreement.title} "
        f"[dim]({agreement.id}, status={agreement.status.value}, version={agreement.version})[/dim]"
    )


@app.command("init")
def init():
    """Initialize the database schema"""
    from vahq_agreements.db.supabase import MIGRATION_PATH, get_database
    from vahq_agreements.utils.config import get_settings

    settings = get_settings()
    with _engine_errors():
        get_database().init_db()
    if settings.db_mode == "supabase":
        console.print(f"[blue]Supabase schema verified.[/blue] Migration file: {MIGRATION_PATH}")
    else:
        console.print(f"[green]SQLite database initialized at {settings.database_path}[/green]")


@app.command("db-status")
def db_status():
    """Show database connection status and table counts"""
    from vahq_agreements.db.supabase import get_database

    status = get_database().get_status()
    table = Table(title=f"Database Status ({status['mode']})")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")
    for k, v in status.items():
        table.add_row(str(k), str(v))
    console.print(table)


@app.command("add-sample")
def add_sample():
    """Add sample workflow templates"""
    from vahq_agreements.db.seed import seed_sample_templates
    from vahq_agreements.db.supabase import get_database

    with _engine_errors():
        db = get_database()
        db.init_db()
        ids = seed_sample_templates(db)
    console.print(f"[green][OK] Added {len(ids)} sample templates[/green]")


@app.command("templates")
def templates(
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Filter by category"),
):
    """List workflow templates"""
    with _engine_errors():
        template_list = _service().templates.list_templates(category)

    if not template_list:
        console.print("[yellow]No templates available[/yellow]")
        return

    table = Table(title="Workflow Templates")
    table.add_column("ID", style="cyan")
    table.add_column("Title", style="green")
    table.add_column("Category", style="magenta")
    table.add_column("Sections", justify="right")
    for t in template_list:
        table.add_row(t.id, t.title, t.category, str(len(t.default_structure.sections)))
    console.print(table)


@app.command("template")
def template_detail(template_id: str = typer.Argument(..., help="Template ID")):
    """Show a template's structure and internal guidance"""
    with _engine_errors():
        template = _service().templates.get_template(template_id)

    console.print(Panel(
        f"[bold]Category:[/bold] {template.category}\n"
        f"[bold]Description:[/bold] {template.description}",
        title=template.title,
        border_style="blue",
    ))
    for section in template.default_structure.sections:
        console.print(f"\n[cyan]{section.title}[/cyan] [dim]({section.id})[/dim]")
        for item in section.items:
            options = f" [{', '.join(item.options)}]" if isinstance(item, CheckboxGroupField) else ""
            console.print(f"  - {item.label} [dim]({item.id}, {item.type})[/dim]{options}")
    if template.guidance_content:
        console.print("\n[yellow]Internal guidance:[/yellow]")
        for g in template.guidance_content.ordered_sections():
            console.print(f"  [bold]{g.title}[/bold]: {g.body}")


@app.command("deploy")
def deploy(
    template_id: str = typer.Argument(..., help="Template ID"),
    client_id: str = typer.Option(..., "--client", help="Client ID"),
    operator_id: str = typer.Option(..., "--operator", help="VA user ID"),
):
    """Create a draft agreement for a client from a template"""
    with _engine_errors():
        agreement = _service().deploy(template_id, client_id, operator_id)
    _print_agreement(agreement)


@app.command("show")
def show(
    agreement_id: str = typer.Argument(..., help="Agreement ID"),
    client_view: bool = typer.Option(False, "--client-view", help="Show what the client sees"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Show an agreement's structure"""
    from vahq_agreements.services.render import render_client_view

    with _engine_errors():
        agreement = _service().get_agreement(agreement_id)

    if client_view:
        view = render_client_view(agreement.custom_structure, agreement.title)
        if json_output:
            console.print(json.dumps(view.model_dump(mode="json"), ensure_ascii=False, indent=2))
            return
        for section in view.sections:
            console.print(f"\n[cyan]{section.title}[/cyan]")
            for item in section.items:
                console.print(f"  - {item.label}: {item.value if item.value is not None else ''}")
        return

    if json_output:
        console.print(json.dumps(agreement.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return

    _print_agreement(agreement)
    for section in agreement.custom_structure.sections:
        console.print(f"\n[cyan]{section.title}[/cyan] [dim]({section.id})[/dim]")
        for item in section.items:
            flag = " [yellow](hidden)[/yellow]" if item.hidden else ""
            console.print(f"  - {item.label} [dim]({item.id}, {item.type})[/dim]{flag}")
            if isinstance(item, CheckboxGroupField):
                for opt in item.options:
                    mark = "[yellow]hidden[/yellow]" if opt in item.hidden_options else "shown"
                    console.print(f"      {opt} ({mark})")


@app.command("customize")
def customize(
    agreement_id: str = typer.Argument(..., help="Agreement ID"),
    operation: OperationType = typer.Argument(..., help="Customization operation"),
    section_id: str = typer.Argument(..., help="Section ID"),
    field_id: Optional[str] = typer.Argument(None, help="Field ID"),
    option: Optional[str] = typer.Option(None, "--option", "-o", help="Option label"),
    actor_id: Optional[str] = typer.Option(None, "--actor", help="Acting user ID"),
):
    """Apply one show/hide or option edit and save it"""
    service = _service()
    with _engine_errors():
        agreement = service.get_agreement(agreement_id)
        op = StructureOperation(op=operation, section_id=section_id, field_id=field_id, option=option)
        agreement = service.customize(agreement, [op], actor_id)
    _print_agreement(agreement)


TRUE_VALUES = ("1", "true", "yes", "y")
FALSE_VALUES = ("0", "false", "no", "n")


def _parse_value(item, raw: str):
    if isinstance(item, CheckboxField):
        answer = raw.strip().lower()
        if answer in TRUE_VALUES:
            return True
        if answer in FALSE_VALUES:
            return False
        raise typer.BadParameter(
            f"'{raw}' is not a yes/no answer; use one of {', '.join(TRUE_VALUES + FALSE_VALUES)}",
            param_hint="value",
        )
    if isinstance(item, CheckboxGroupField):
        return [v.strip() for v in raw.split(",") if v.strip()]
    return raw


@app.command("set-value")
def set_value(
    agreement_id: str = typer.Argument(..., help="Agreement ID"),
    section_id: str = typer.Argument(..., help="Section ID"),
    field_id: str = typer.Argument(..., help="Field ID"),
    value: Optional[str] = typer.Argument(None, help="Value; comma-separated for option groups"),
    clear: bool = typer.Option(False, "--clear", help="Clear the value"),
    actor_id: Optional[str] = typer.Option(None, "--actor", help="Acting user ID"),
):
    """Fill in a field value"""
    from vahq_agreements.services.customization import get_item

    service = _service()
    with _engine_errors():
        agreement = service.get_agreement(agreement_id)
        item = get_item(agreement.custom_structure, section_id, field_id)
        parsed = None if clear or value is None else _parse_value(item, value)
        agreement = service.fill_values(agreement, [(section_id, field_id, parsed)], actor_id)
    _print_agreement(agreement)


@app.command("publish")
def publish(
    agreement_id: str = typer.Argument(..., help="Agreement ID"),
    actor_id: Optional[str] = typer.Option(None, "--actor", help="Acting user ID"),
):
    """Issue an agreement to the client portal"""
    service = _service()
    with _engine_errors():
        agreement = service.publish(service.get_agreement(agreement_id), actor_id)
    _print_agreement(agreement)


@app.command("accept")
def accept(
    agreement_id: str = typer.Argument(..., help="Agreement ID"),
    actor_id: Optional[str] = typer.Option(None, "--actor", help="Acting client user ID"),
):
    """Record the client's authorisation"""
    service = _service()
    with _engine_errors():
        agreement = service.client_accept(service.get_agreement(agreement_id), actor_id)
    _print_agreement(agreement)


@app.command("feedback")
def feedback(
    agreement_id: str = typer.Argument(..., help="Agreement ID"),
    comment: str = typer.Option("", "--comment", "-m", help="Requested changes"),
    actor_id: Optional[str] = typer.Option(None, "--actor", help="Acting client user ID"),
):
    """Record a client change request"""
    service = _service()
    with _engine_errors():
        agreement = service.client_feedback(service.get_agreement(agreement_id), actor_id, comment)
    _print_agreement(agreement)


@app.command("save-defaults")
def save_defaults(agreement_id: str = typer.Argument(..., help="Agreement ID")):
    """Save an agreement's authorisation texts as its template's defaults"""
    service = _service()
    with _engine_errors():
        template = service.save_template_defaults(service.get_agreement(agreement_id))
    console.print(f"[green][OK] Authorisation text saved as defaults of {template.title}[/green]")


@app.command("audit")
def audit(
    agreement_id: str = typer.Argument(..., help="Agreement ID"),
    limit: int = typer.Option(20, "--limit", "-l", help="Number of entries to list"),
):
    """List an agreement's version log, newest first"""
    with _engine_errors():
        entries = _service().audit_log(agreement_id)

    if not entries:
        console.print("[yellow]No audit entries found[/yellow]")
        return

    table = Table(title="Agreement History")
    table.add_column("ID", style="cyan", max_width=10)
    table.add_column("Summary", style="green")
    table.add_column("By", style="magenta")
    table.add_column("Date")
    for e in entries[:limit]:
        table.add_row(
            e.id[:8] + "...",
            e.change_summary,
            e.changed_by or "",
            str(e.created_at or "")[:19],
        )
    console.print(table)


if __name__ == "__main__":
    app()
