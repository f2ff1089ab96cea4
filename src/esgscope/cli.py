#!/usr/bin/env python3
"""ESGScope CLI for inspecting companies and running tools."""

import argparse
import json

import questionary
from rich.console import Console
from rich.table import Table

from esgscope.company.repository import CompanyRepository
from esgscope.config import config
from esgscope.logging_setup import configure_logging
from esgscope.seed import seed_companies
from esgscope.tools import ToolDispatcher

console = Console()


def parse_params(pairs: list[str]) -> dict:
    """Turn ["symbol=AAPL", "count=3"] into {"symbol": "AAPL", "count": "3"}."""
    params = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"Expected key=value, got '{pair}'")
        params[key] = value
    return params


def seed():
    """Seed the reference companies."""
    created = seed_companies()
    if created:
        console.print(f"[green]Seeded {created} companies.[/]")
    else:
        console.print("[dim]Data already exists, nothing to seed.[/]")


def list_companies():
    """Print every company as a table."""
    companies = CompanyRepository().get_all()
    if not companies:
        console.print("[red]No companies found.[/]")
        return

    table = Table(title="Companies")
    for column in ("ID", "Symbol", "Name", "Industry", "Risk", "ESG", "Market cap (B)"):
        table.add_column(column)
    for c in companies:
        table.add_row(
            str(c.id),
            c.symbol,
            c.name,
            c.industry,
            c.risk_level,
            f"{c.esg_score:.1f}",
            f"{c.market_cap / 1_000_000_000:,.1f}",
        )
    console.print(table)


def list_tools():
    """Print the registered tools and their parameters."""
    capabilities = ToolDispatcher().get_capabilities()
    info = capabilities["serverInfo"]
    console.print(f"[bold]{info['name']}[/] v{info['version']}")
    for tool in capabilities["tools"]:
        params = ", ".join(
            f"{name}{'' if spec['required'] else '?'}:{spec['type']}"
            for name, spec in tool["parameters"].items()
        )
        console.print(f"  [cyan]{tool['name']}[/]({params}) - {tool['description']}")


def run_tool(tool: str, params: dict):
    """Execute a tool and print its envelope."""
    result = ToolDispatcher().execute_tool(tool, params)
    style = "green" if result.get("success") else "red"
    console.print_json(json.dumps(result), highlight=True)
    console.print(f"[{style}]success={result.get('success')}[/]")


def analyze():
    """Pick a company interactively and show its analysis."""
    companies = CompanyRepository().get_all()
    if not companies:
        console.print("[red]No companies found.[/]")
        return

    selected = questionary.select(
        "Select a company:",
        choices=[questionary.Choice(title=f"{c.symbol} ({c.name})", value=c) for c in companies],
    ).ask()
    if not selected:
        console.print("[dim]Cancelled.[/]")
        return

    run_tool("analyze_company", {"symbol": selected.symbol})


def main():
    parser = argparse.ArgumentParser(description="ESGScope CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("seed", help="Seed reference companies")
    subparsers.add_parser("list", help="List companies")
    subparsers.add_parser("tools", help="List available tools")
    run_parser = subparsers.add_parser("run", help="Execute a tool")
    run_parser.add_argument("tool", help="Tool name, e.g. get_esg_performers")
    run_parser.add_argument("params", nargs="*", help="Parameters as key=value")
    subparsers.add_parser("analyze", help="Analyze a company interactively")

    args = parser.parse_args()
    configure_logging()

    # The in-memory store starts empty in every process
    if config.storage_backend == "memory" and args.command != "seed":
        seed_companies()

    if args.command == "seed":
        seed()
    elif args.command == "list":
        list_companies()
    elif args.command == "tools":
        list_tools()
    elif args.command == "run":
        try:
            params = parse_params(args.params)
        except argparse.ArgumentTypeError as e:
            parser.error(str(e))
        run_tool(args.tool, params)
    elif args.command == "analyze":
        analyze()


if __name__ == "__main__":
    main()
