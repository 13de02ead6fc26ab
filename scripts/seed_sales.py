"""Seed the sales master with demo managers and representatives"""

import os
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from rich import box
from rich.console import Console
from rich.table import Table

from dailyreport.auth.passwords import hash_password, validate_password
from dailyreport.core.config import load_config
from dailyreport.models.sales import SalesRecord
from dailyreport.services.sales_store import SalesStore
from dailyreport.utils.exceptions import ConfigError, ConflictError, StorageError

console = Console()

SEED_PASSWORD = os.getenv("SEED_PASSWORD", "Password123!")

# (sales_code, sales_name, email, department, is_manager, manager_code)
SEED_SALES = [
    ("MGR001", "Taro Yamada", "yamada@example.com", "Sales 1", True, None),
    ("MGR002", "Jiro Tanaka", "tanaka@example.com", "Sales 2", True, None),
    ("S001", "Hanako Sato", "sato@example.com", "Sales 1", False, "MGR001"),
    ("S002", "Ichiro Suzuki", "suzuki@example.com", "Sales 2", False, "MGR002"),
]


def main() -> int:
    try:
        config = load_config()
    except ConfigError as e:
        console.print(f"[bold red]✗ {e.message}[/bold red]")
        return 1

    if config.is_production and not config.allow_seed:
        console.print("[bold red]✗ Seeding is not allowed in production.[/bold red]")
        console.print("Set ALLOW_SEED=true if you really want to seed this environment.")
        return 1

    policy = validate_password(SEED_PASSWORD)
    if not policy.valid:
        for error in policy.errors:
            console.print(f"[bold red]✗ {error}[/bold red]")
        return 1

    store = SalesStore.in_dir(config.data_dir)
    try:
        store.load_all()
    except StorageError:
        console.print(f"[bold red]✗ Could not read {store.path}; fix or remove it and retry.[/bold red]")
        return 1

    console.print(f"[bold blue]Seeding sales master in {config.environment}...[/bold blue]")

    table = Table(title="Sales master", box=box.SIMPLE)
    table.add_column("Code")
    table.add_column("Name")
    table.add_column("Department")
    table.add_column("Manager")
    table.add_column("Result")

    for code, name, email, department, is_manager, manager_code in SEED_SALES:
        manager = store.find_by_code(manager_code) if manager_code else None
        record = SalesRecord(
            sales_code=code,
            sales_name=name,
            email=email,
            password_hash=hash_password(SEED_PASSWORD),
            department=department,
            is_manager=is_manager,
            manager_id=manager.id if manager else None,
        )
        try:
            store.create(record)
            result = "[green]created[/green]"
        except ConflictError:
            result = "[yellow]exists[/yellow]"
        table.add_row(code, name, department, "yes" if is_manager else "", result)

    console.print(table)
    console.print(f"[bold green]✓ Done.[/bold green] Records stored in {store.path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
