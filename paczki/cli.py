"""
CLI dla operatorów Paczek.

Commands:
- paczki validate-nip - walidacja sumy kontrolnej NIP
- paczki format-nip - formatowanie XXX-XXX-XX-XX
- paczki lookup - dane organizacji z CEIDG/KRS
- paczki batch - walidacja NIP z pliku CSV
- paczki progress - postęp listy życzeń z pliku JSON
"""

import asyncio
import json
import logging
import sys

import click
import pandas as pd
from pydantic import ValidationError

from . import __version__
from .config import get_settings
from .models.wishlist import FulfillmentRecord, WishlistItem
from .services.registry_client import get_registry_client
from .utils.fulfillment import aggregate_purchases, compute_fulfillment
from .utils.validators import clean_nip, format_nip, is_valid_nip

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr),
    ]
)

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="paczki")
def cli():
    """
    Paczki - narzędzia dla list życzeń i weryfikacji organizacji.

    Przyklady uzycia:

    \b
    paczki validate-nip 526-000-12-46
    paczki lookup 5260001246 --output org.json
    paczki batch organizacje.csv --output wynik.csv
    """
    pass


@cli.command("validate-nip")
@click.argument("nip")
def validate_nip_command(nip: str):
    """Sprawdz sume kontrolna NIP. Kod wyjscia 1 dla niepoprawnego."""
    if is_valid_nip(nip):
        click.secho(f"[OK] {format_nip(nip)}", fg="green")
        return
    click.secho(f"[FAIL] Nieprawidlowy NIP: {nip}", fg="red")
    sys.exit(1)


@cli.command("format-nip")
@click.argument("nip")
def format_nip_command(nip: str):
    """Sformatuj NIP jako XXX-XXX-XX-XX (bez sprawdzania sumy kontrolnej)."""
    click.echo(format_nip(nip))


@cli.command()
@click.argument("nip")
@click.option("--output", "-o", help="Zapisz do pliku JSON")
@click.option("--mock", is_flag=True, help="Uzyj danych testowych zamiast API rejestrow")
def lookup(nip: str, output: str, mock: bool):
    """
    Pobierz dane organizacji z CEIDG/KRS.

    Przyklad:
    \b
    paczki lookup 5260001246
    """

    async def run():
        click.echo(f"[SEARCH] Szukam NIP: {nip}")

        client = get_registry_client(get_settings(), use_mock=mock)
        try:
            result = await client.lookup_nip(nip)
        finally:
            await client.close()

        click.echo("\n" + "=" * 60)
        if result.found and result.data:
            click.secho("[OK] ORGANIZACJA ZNALEZIONA", fg="green", bold=True)
            data = result.data
            click.echo(f"\n  Nazwa: {data.name}")
            click.echo(f"  NIP: {format_nip(data.nip or result.nip)}")
            if data.regon:
                click.echo(f"  REGON: {data.regon}")
            if data.address:
                click.echo(f"  Adres: {data.address}, {data.postal_code or ''} {data.city or ''}".rstrip())
            if data.province:
                click.echo(f"  Wojewodztwo: {data.province}")
            click.echo(f"  Zrodlo: {(data.source or '').upper()}")
        else:
            click.secho("[FAIL] NIE ZNALEZIONO", fg="red", bold=True)
            if result.error:
                click.echo(f"\n  Blad: {result.error}")
        click.echo("=" * 60)

        if output:
            with open(output, "w", encoding="utf-8") as f:
                json.dump(result.model_dump(), f, indent=2, ensure_ascii=False, default=str)
            click.echo(f"\n[SAVED] Zapisano do: {output}")

        return result

    result = asyncio.run(run())
    if not result.found:
        sys.exit(1)


def validate_nip_frame(df: pd.DataFrame, nip_column: str = "nip") -> pd.DataFrame:
    """
    Dodaje kolumny nip_clean, nip_valid, nip_formatted do DataFrame.

    Puste komórki są traktowane jako niepoprawny NIP.
    """
    result = df.copy()
    raw = result[nip_column].fillna("").astype(str)
    result["nip_clean"] = raw.map(clean_nip)
    result["nip_valid"] = raw.map(is_valid_nip).astype(bool)
    # Niepoprawne NIP jako brak wartości (NaN)
    result["nip_formatted"] = raw.map(format_nip).where(result["nip_valid"])
    return result


@cli.command()
@click.argument("input_csv", type=click.Path(exists=True))
@click.option("--output", "-o", default="nip_results.csv", help="Plik CSV z wynikami")
@click.option("--nip-column", default="nip", help="Nazwa kolumny z NIP")
def batch(input_csv: str, output: str, nip_column: str):
    """
    Walidacja NIP z pliku CSV.

    Przyklad:
    \b
    paczki batch organizacje.csv --output wynik.csv
    """
    click.echo(f"[BATCH] Wczytuje: {input_csv}")

    # NIP jako tekst - zera wiodące i myślniki zostają
    try:
        df = pd.read_csv(input_csv, encoding="utf-8", dtype=str)
    except UnicodeDecodeError:
        # Excel z BOM
        df = pd.read_csv(input_csv, encoding="utf-8-sig", dtype=str)

    if nip_column not in df.columns:
        click.secho(f"[ERROR] Brak kolumny '{nip_column}' w CSV", fg="red")
        sys.exit(2)

    result = validate_nip_frame(df, nip_column)
    valid = int(result["nip_valid"].sum())
    total = len(result)

    click.echo(f"[OK] Poprawne NIP: {valid}/{total}")
    result.to_csv(output, index=False, encoding="utf-8")
    click.secho(f"[SAVED] CSV zapisany: {output}", fg="green")


@cli.command()
@click.argument("input_json", type=click.File("r", encoding="utf-8"))
def progress(input_json):
    """
    Postep listy zyczen z pliku JSON.

    Format: {"items": [{"product_id": "A", "quantity": 2}], "purchases": [{"product_id": "A", "quantity": 2}]}
    """
    try:
        payload = json.load(input_json)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Nieprawidłowy JSON: {e}")

    if not isinstance(payload, dict):
        raise click.ClickException("Oczekiwano obiektu JSON z kluczami items i purchases")

    try:
        items = [WishlistItem(**item) for item in payload.get("items", [])]
        purchases = [FulfillmentRecord(**record) for record in payload.get("purchases", [])]
    except (TypeError, ValidationError) as e:
        raise click.ClickException(f"Nieprawidłowe dane listy życzeń: {e}")

    result = compute_fulfillment(items, aggregate_purchases(purchases, scoped=True))
    click.echo(json.dumps(result.model_dump()))


if __name__ == "__main__":
    cli()
