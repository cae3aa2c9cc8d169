import logging

import click
from rich.logging import RichHandler

from .core import Builder, BuildError, console
from .models import BuildOptions

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


@click.command()
@click.option("-d", "--database", required=False, help="Database to build. Defaults to every configured database.")
@click.option(
    "-e",
    "--extension",
    required=False,
    help="Extension directory to build, relative to the current directory unless absolute.",
)
@click.option("-b", "--backup", required=False, help="Backup file to initialize the database from.")
@click.option("-s", "--source", required=False, help="Source tree to initialize the database from.")
@click.option("-i", "--initialize", is_flag=True, default=False, help="Initialize the database. Destructive.")
@click.option(
    "-c",
    "--config",
    required=False,
    type=click.Path(),
    help="Path to the datasource configuration file (default: node-datasource/config.yml).",
)
@click.option("-k", "--keep-sql", is_flag=True, default=False, help="Keep the generated SQL files.")
@click.option("-p", "--populate-data", is_flag=True, default=False, help="Populate sample data.")
@click.option("-w", "--wipe-views", is_flag=True, default=False, help="Drop views before rebuilding them.")
@click.option("--client-only", is_flag=True, default=False, help="Only build the client.")
@click.option("--database-only", is_flag=True, default=False, help="Only build the database.")
@click.option("-f", "--frozen", is_flag=True, default=False, help="Install the extension as frozen.")
@click.option("-u", "--unregister", is_flag=True, default=False, help="Unregister the extension instead of building it.")
@click.option(
    "--root",
    required=False,
    type=click.Path(file_okay=False),
    help="Application checkout root (default: current directory).",
)
@click.option("--verbose", is_flag=True, default=False, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
def main(
    database,
    extension,
    backup,
    source,
    initialize,
    config,
    keep_sql,
    populate_data,
    wipe_views,
    client_only,
    database_only,
    frozen,
    unregister,
    root,
    verbose,
    log_file,
):
    """Build the client and databases for the core and registered extensions."""
    logger = logging.getLogger("xtbuild")

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    options = BuildOptions(
        database=database,
        extension=extension,
        backup=backup,
        source=source,
        config=config,
        initialize=initialize,
        keep_sql=keep_sql,
        populate_data=populate_data,
        wipe_views=wipe_views,
        client_only=client_only,
        database_only=database_only,
        frozen=frozen,
        unregister=unregister,
    )

    try:
        message = Builder(root=root).build(options)
    except BuildError as exc:
        logger.error(str(exc))
        raise click.ClickException(str(exc)) from exc

    console.print(message, style="green", markup=False)


if __name__ == "__main__":
    main()
