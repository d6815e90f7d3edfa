# termlens/cli.py
import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv

from termlens.factory import build_pipeline, build_router
from termlens.processor.chunker.chunker import ChunkingError
from termlens.processor.parsers.factory import ParserFactory, UnsupportedFormatError
from termlens.reporter import ReportWriter
from termlens.router.config_loader import ConfigError
from termlens.router.router import ClassifierCallError


# Carga .env una sola vez, antes que cualquier otra cosa
load_dotenv()

_LOG_FORMAT    = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_TOP_TERMS     = 10


# ------------------------------------------------------------------
# Grupo raíz
# ------------------------------------------------------------------

@click.group()
@click.version_option(package_name="termlens")
def main():
    """
    termlens: detector de terminología ambigua entre disciplinas.

    Encuentra términos que significan cosas distintas según el campo
    académico y propone, para cada uno, sus posibles definiciones.
    """


# ------------------------------------------------------------------
# termlens analyze
# ------------------------------------------------------------------

@main.command()
@click.option(
    "--doc", "-d",
    required = True,
    type     = click.Path(exists=False),   # validamos nosotros para mejor mensaje
    help     = "Ruta al documento (.txt, .md, .pdf)",
)
@click.option(
    "--chunk-size",
    type = int,
    help = "Caracteres por ventana (default del config, o 3000)",
)
@click.option(
    "--overlap",
    type = int,
    help = "Solape entre ventanas en caracteres (default del config, o 200)",
)
@click.option(
    "--workers",
    type = int,
    help = "Ventanas analizadas en paralelo (default 1: secuencial)",
)
@click.option(
    "--skip-failed",
    is_flag = True,
    help    = "Si una ventana falla, seguir y marcar el resultado como parcial",
)
@click.option(
    "--pages",
    metavar = "LIST",
    help    = "Solo PDF: páginas a analizar (ej: 1,3-5)",
)
@click.option(
    "--output", "-o",
    type = click.Path(dir_okay=False),
    help = "Archivo JSON de salida (default: ~/.termlens/output/<titulo>_terms.json)",
)
@click.option("--config", "config_path", type=click.Path(), help="Ruta al config.yaml")
@click.option("--verbose", "-v", is_flag=True, help="Muestra logs de depuración")
def analyze(
    doc:          str,
    chunk_size:   int | None,
    overlap:      int | None,
    workers:      int | None,
    skip_failed:  bool,
    pages:        str | None,
    output:       str | None,
    config_path:  str | None,
    verbose:      bool,
):
    """Analiza un documento y reporta sus términos ambiguos."""
    _configure_logging(verbose)

    # ── Validaciones de entrada ───────────────────────────────────
    _validate_file(doc)
    selected_pages = _parse_pages(pages) if pages else None

    try:
        document = ParserFactory().parse(doc, pages=selected_pages)
    except (UnsupportedFormatError, ValueError, RuntimeError) as e:
        # PyMuPDF señala PDFs corruptos con subclases de RuntimeError
        _abort(str(e))

    if not document.text.strip():
        _abort("El documento no contiene texto analizable.")

    # ── Ensamblar pipeline ────────────────────────────────────────
    try:
        pipeline = build_pipeline(
            config_path  = config_path,
            chunk_size   = chunk_size,
            overlap_size = overlap,
            workers      = workers,
            skip_failed  = True if skip_failed else None,   # sin flag decide el config
        )
    except (FileNotFoundError, ConfigError, ChunkingError, RuntimeError, ValueError) as e:
        _abort(str(e))

    # ── Ejecutar ──────────────────────────────────────────────────
    run = pipeline.start(document.text)
    click.echo(f"[termlens] '{document.title}' — {run.total_windows} ventanas")

    try:
        for event in run.events():
            percent = int(event.completed / event.total * 100)
            if event.failed:
                click.echo(
                    click.style(
                        f"[termlens] ⚠ Ventana {event.window_index + 1} falló — continuando",
                        fg="yellow",
                    )
                )
            click.echo(
                f"[termlens] Analizando... {event.completed}/{event.total} ({percent}%)"
                f" — términos: {event.terms_found}"
            )

    except ClassifierCallError as e:
        _error(
            f"El clasificador falló en la ventana {_window_label(e)}: {e}\n"
            f"No se generó reporte. Usa --skip-failed para continuar "
            f"a pesar de ventanas fallidas."
        )
        sys.exit(2)

    except KeyboardInterrupt:
        # Solo llega aquí si la interrupción cae fuera de una llamada al
        # clasificador; dentro, la ejecución se cancela y hay reporte parcial
        click.echo("\n[termlens] Análisis interrumpido. No se generó reporte.")
        sys.exit(0)

    except Exception as e:
        _error(f"Error inesperado: {type(e).__name__}: {e}")
        sys.exit(1)

    result      = run.result
    output_path = ReportWriter().write(result, document, Path(output) if output else None)

    # ── Resumen final ─────────────────────────────────────────────
    _print_summary(result, output_path)


# ------------------------------------------------------------------
# termlens models
# ------------------------------------------------------------------

@main.command()
@click.option("--config", "config_path", type=click.Path(), help="Ruta al config.yaml")
def models(config_path: str | None):
    """Lista los modelos configurados y si están disponibles ahora."""
    try:
        router = build_router(config_path)
    except (FileNotFoundError, ConfigError, RuntimeError) as e:
        _abort(str(e))

    available = set(router.available_models())
    for position, name in enumerate(router.model_names(), start=1):
        status = (
            click.style("disponible", fg="green")
            if name in available
            else click.style("no disponible", fg="yellow")
        )
        click.echo(f"[termlens] {position}. {name:<8} {status}")


# ------------------------------------------------------------------
# Helpers de validación
# ------------------------------------------------------------------

def _validate_file(path: str) -> None:
    """Verifica existencia y formato del archivo."""
    p = Path(path)

    if not p.exists():
        _abort(f"Archivo no encontrado: {path}")

    if not p.is_file():
        _abort(f"La ruta no es un archivo: {path}")

    if p.suffix.lower() not in ParserFactory.SUPPORTED_EXTENSIONS:
        supported = ", ".join(ParserFactory.SUPPORTED_EXTENSIONS)
        _abort(
            f"Formato no soportado: '{p.suffix}'\n"
            f"Formatos disponibles: {supported}"
        )


def _parse_pages(raw: str) -> list[int]:
    """'1,3-5' → [1, 3, 4, 5]. Sin duplicados, en orden de aparición."""
    pages: list[int] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            if "-" in part:
                first, last = (int(x) for x in part.split("-", 1))
                if first > last:
                    raise ValueError
                numbers = range(first, last + 1)
            else:
                numbers = [int(part)]
        except ValueError:
            _abort(f"--pages: rango inválido '{part}'. Ejemplo válido: 1,3-5")

        for n in numbers:
            if n < 1:
                _abort(f"--pages: las páginas empiezan en 1, recibido {n}")
            if n not in pages:
                pages.append(n)

    if not pages:
        _abort("--pages no puede estar vacío.")
    return pages


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level  = logging.DEBUG if verbose else logging.WARNING,
        format = _LOG_FORMAT,
    )


# ------------------------------------------------------------------
# Helpers de output
# ------------------------------------------------------------------

def _print_summary(result, output_path: Path) -> None:
    """Imprime el resumen final del análisis."""
    click.echo("")
    click.echo("─" * 50)
    if result.cancelled:
        click.echo("[termlens] ⚠ Análisis cancelado — resultado parcial")
    elif result.partial:
        click.echo("[termlens] ⚠ Análisis parcial")
    else:
        click.echo("[termlens] ✓ Análisis completado")
    click.echo(f"[termlens]   Ventanas     : {result.completed_windows}/{result.total_windows}")
    click.echo(f"[termlens]   Términos     : {len(result.terms)}")

    if result.unresolved:
        click.echo(f"[termlens]   Sin posición : {result.unresolved}")

    if result.parse_failures:
        click.echo(
            click.style(
                f"[termlens]   Respuestas inválidas: {len(result.parse_failures)} ventana(s)",
                fg="yellow",
            )
        )

    if result.failed_windows:
        failed = ", ".join(str(i + 1) for i in result.failed_windows)
        click.echo(click.style(f"[termlens]   Ventanas fallidas : {failed}", fg="yellow"))

    top = sorted(result.terms, key=lambda t: t.confidence, reverse=True)[:_TOP_TERMS]
    if top:
        click.echo("[termlens]   Principales:")
        for term in top:
            fields = ", ".join(m.field for m in term.possible_meanings) or "—"
            click.echo(f"[termlens]     {term.term} ({term.confidence}) — {fields}")

    click.echo(f"[termlens]   Output       : {output_path}")
    click.echo("─" * 50)


def _window_label(error: ClassifierCallError) -> str:
    return str(error.window_index + 1) if error.window_index is not None else "?"


def _abort(message: str) -> None:
    """Error de validación: culpa del usuario."""
    click.echo(click.style(f"[termlens] Error: {message}", fg="red"), err=True)
    sys.exit(1)


def _error(message: str) -> None:
    """Error de sistema: no es culpa del usuario."""
    click.echo(click.style(f"[termlens] {message}", fg="red"), err=True)
