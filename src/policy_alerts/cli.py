#!/usr/bin/env python3
"""
Consola de alertas de cobranza y renovación

Lee un archivo JSON con la cartera de pólizas (lista o {"policies": [...]})
y muestra las alertas o los contadores del tablero.
"""
import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.table import Table

from policy_alerts.engine.alerts import generate_alerts
from policy_alerts.engine.messages import alert_message
from policy_alerts.engine.payment_status import resolve_status
from policy_alerts.engine.statistics import aggregate, payment_statistics, renewal_statistics
from policy_alerts.models.policy import PolicyRecord

logger = logging.getLogger("policy_alerts.cli")
console = Console()

SEVERITY_STYLES = {
    "critical": "bold white on red",
    "error": "bold red",
    "warning": "yellow",
    "info": "cyan",
}


def load_policies(path: Path) -> List[PolicyRecord]:
    """Carga y valida la cartera; los registros inválidos se omiten con aviso."""
    with open(path, "r", encoding="utf-8") as f:
        data: Any = json.load(f)
    if isinstance(data, dict):
        data = data.get("policies", [])
    if not isinstance(data, list):
        raise ValueError(f"Formato no reconocido en {path}: se esperaba una lista de pólizas")

    policies = []
    for idx, item in enumerate(data):
        try:
            policies.append(PolicyRecord.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Póliza #{idx} omitida: {e.error_count()} errores de validación")
    return policies


def _parse_today(value: Optional[str]) -> date:
    if not value:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Fecha inválida (use YYYY-MM-DD): {value}")


def show_alerts(policies: List[PolicyRecord], today: date, as_json: bool) -> int:
    alerts = generate_alerts(policies, today)

    if as_json:
        payload = {
            "today": today.isoformat(),
            "alerts": [
                {**a.model_dump(mode="json", by_alias=True), "message": alert_message(a)}
                for a in alerts
            ],
            "statistics": aggregate(alerts).model_dump(by_alias=True),
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    if not alerts:
        console.print("[green]✅ Sin alertas pendientes[/green]")
        return 0

    table = Table(
        title=f"[bold cyan]Alertas al {today.strftime('%d/%m/%Y')}[/bold cyan]",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Póliza", style="green")
    table.add_column("Contratante", style="white")
    table.add_column("Tipo")
    table.add_column("Ventana", justify="center")
    table.add_column("Días", justify="right")
    table.add_column("Vence", style="blue")
    table.add_column("Mensaje")

    for a in alerts:
        style = SEVERITY_STYLES.get(a.severity.value, "")
        table.add_row(
            a.policy_number,
            a.holder_name[:30] + "..." if len(a.holder_name) > 30 else a.holder_name,
            a.kind.value,
            a.bucket_category.value,
            str(a.days_until_due),
            a.due_date.strftime("%d/%m/%Y"),
            f"[{style}]{alert_message(a)}[/{style}]" if style else alert_message(a),
        )

    console.print(table)
    stats = aggregate(alerts)
    console.print(
        f"Total: [bold]{stats.total}[/bold] · Persistentes: [bold]{stats.persistent_count}[/bold] · "
        + " · ".join(f"{k}: {v}" for k, v in sorted(stats.by_severity.items()))
    )
    return 0


def show_stats(policies: List[PolicyRecord], today: date, as_json: bool) -> int:
    payments = payment_statistics(policies, today)
    renewals = renewal_statistics(policies, today)

    if as_json:
        print(json.dumps(
            {
                "today": today.isoformat(),
                "payments": payments.model_dump(by_alias=True),
                "renewals": renewals.model_dump(by_alias=True),
            },
            ensure_ascii=False,
            indent=2,
        ))
        return 0

    table = Table(title="[bold cyan]Cobranza[/bold cyan]", box=box.ROUNDED)
    table.add_column("Indicador", style="white")
    table.add_column("Valor", justify="right", style="bold")
    table.add_row("Pólizas", str(payments.total))
    table.add_row("Al corriente", str(payments.current))
    table.add_row("Por vencer (≤7 días)", str(payments.due_soon))
    table.add_row("Vencidas (1-7 días)", str(payments.overdue))
    table.add_row("Vencido crítico", str(payments.critical))
    table.add_row("Prima total", f"${payments.total_amount:,.2f}")
    table.add_row("Prima vencida", f"${payments.overdue_amount:,.2f}")
    console.print(table)

    table = Table(title="[bold cyan]Renovaciones[/bold cyan]", box=box.ROUNDED)
    table.add_column("Ventana", style="white")
    table.add_column("Pólizas", justify="right", style="bold")
    for bucket, count in renewals.upcoming.items():
        table.add_row(bucket, str(count))
    table.add_row("Vida (total)", str(renewals.life_products.total))
    table.add_row("Vida (próximas)", str(renewals.life_products.upcoming_renewals))
    console.print(table)
    return 0


def show_status(policies: List[PolicyRecord], today: date, as_json: bool) -> int:
    resolved = [resolve_status(p, today) for p in policies]

    if as_json:
        print(json.dumps(
            [r.model_dump(mode="json", by_alias=True) for r in resolved],
            ensure_ascii=False,
            indent=2,
        ))
        return 0

    table = Table(title="[bold cyan]Estado de pago[/bold cyan]", box=box.ROUNDED)
    table.add_column("Póliza", style="green")
    table.add_column("Próximo pago", style="blue")
    table.add_column("Días", justify="right")
    table.add_column("Estado de pago")
    table.add_column("Estatus")
    for policy, r in zip(policies, resolved):
        c = r.classification
        table.add_row(
            policy.policy_number,
            c.next_due_date.strftime("%d/%m/%Y") if c.next_due_date else "-",
            str(c.days_until_due) if c.days_until_due is not None else "-",
            c.state.value,
            r.status.value,
        )
    console.print(table)
    return 0


COMMANDS = {
    "alerts": show_alerts,
    "stats": show_stats,
    "status": show_status,
}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="policy-alerts",
        description="Alertas de cobranza y renovación de pólizas",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Ejemplos de uso:
  %(prog)s alerts cartera.json                    # Alertas a la fecha de hoy
  %(prog)s alerts cartera.json --today 2024-06-20 # Alertas a una fecha dada
  %(prog)s stats cartera.json --json              # Contadores en JSON
        """,
    )
    p.add_argument("command", choices=sorted(COMMANDS), help="Reporte a generar")
    p.add_argument("policies", type=Path, help="Archivo JSON con la cartera")
    p.add_argument("--today", type=_parse_today, default=None, help="Fecha de referencia (YYYY-MM-DD)")
    p.add_argument("--json", action="store_true", help="Salida en JSON")
    p.add_argument("--verbose", "-v", action="store_true", help="Logs de depuración")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        policies = load_policies(args.policies)
    except (OSError, ValueError) as e:
        logger.error(f"No se pudo leer la cartera: {e}")
        console.print(f"[red]❌ {e}[/red]")
        return 1

    today = args.today or date.today()
    return COMMANDS[args.command](policies, today, args.json)


if __name__ == "__main__":
    sys.exit(main())
