"""Command-line interface for the M-PESA tracker."""

import sys
import logging
from typing import Optional

import click

from .bot.message_handler import MessageHandler, clean_content, format_amount, format_timestamp
from .parsers.notification_parser import NotificationParser
from .pipeline import IngestionPipeline, create_pipeline
from .storage.sql_store import SQLTransactionStore
from .utils.config_manager import ConfigManager, load_bot_settings, BOT_TOKEN_ENV, CHANNEL_ID_ENV
from .utils.error_handler import ConfigurationError, ErrorHandler, NotificationParseError, TrackerError


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class TrackerCLI:
    """Wires configuration, storage and the message handler for CLI commands"""

    def __init__(self, config_path: Optional[str] = None, database_url: Optional[str] = None):
        self.config_manager = ConfigManager(config_path)
        self.config = self.config_manager.load_config()
        if database_url:
            self.config.database_url = database_url
        self.error_handler = ErrorHandler(log_directory=self.config.log_directory)
        self.parser = NotificationParser()
        self._store: Optional[SQLTransactionStore] = None
        self._pipeline: Optional[IngestionPipeline] = None
        self._handler: Optional[MessageHandler] = None

    @property
    def store(self) -> SQLTransactionStore:
        # Opened on first use so parse/init-config never touch the database
        if self._store is None:
            self._store = SQLTransactionStore(self.config.database_url)
        return self._store

    @property
    def pipeline(self) -> IngestionPipeline:
        if self._pipeline is None:
            self._pipeline = create_pipeline(self.config, self.store, self.error_handler)
        return self._pipeline

    @property
    def handler(self) -> MessageHandler:
        if self._handler is None:
            self._handler = MessageHandler(
                pipeline=self.pipeline,
                store=self.store,
                validator=self.pipeline.validator,
                summary_limit=self.config.summary_limit,
                command_prefix=self.config.command_prefix,
            )
        return self._handler

    def close(self):
        if self._store is not None:
            self._store.dispose()


@click.group()
@click.option('--config', '-c', help='Path to configuration file')
@click.option('--database-url', help='Database URL (overrides configuration)')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(ctx, config, database_url, verbose):
    """M-PESA Tracker - Parse and categorize M-PESA payment notifications"""

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    ctx.ensure_object(dict)
    tracker = TrackerCLI(config, database_url)
    ctx.obj['cli'] = tracker
    ctx.call_on_close(tracker.close)


@cli.command()
@click.argument('text')
@click.pass_context
def parse(ctx, text):
    """Parse a notification and print its fields without storing it"""

    cli_instance = ctx.obj['cli']

    try:
        parsed = cli_instance.parser.parse(clean_content(text))
    except NotificationParseError as e:
        click.echo(f"✗ Invalid Mpesa Message: {e}")
        sys.exit(1)

    click.echo(f"✓ Parsed {parsed.transaction_id}")
    click.echo(f"  Amount: {format_amount(parsed.amount)}")
    click.echo(f"  Recipient: {parsed.recipient}")
    click.echo(f"  Date: {format_timestamp(parsed.timestamp)}")
    click.echo(f"  Balance: {format_amount(parsed.balance_after)}")
    click.echo(f"  Cost: {format_amount(parsed.fee)}")


@cli.command()
@click.argument('text', required=False)
@click.option('--file', '-f', 'file_path', type=click.Path(exists=True, dir_okay=False),
              help='Read the message from a file')
@click.pass_context
def ingest(ctx, text, file_path):
    """Store a notification (or a batch of them) with its category"""

    cli_instance = ctx.obj['cli']

    if text is None:
        if file_path:
            with open(file_path, 'r', encoding='utf-8') as f:
                text = f.read()
        else:
            text = click.get_text_stream('stdin').read()

    try:
        response = cli_instance.handler.respond(text)
    except TrackerError as e:
        click.echo(f"✗ Error during ingestion: {e}")
        sys.exit(1)

    click.echo(response)

    if cli_instance.error_handler.has_errors():
        error_summary = cli_instance.error_handler.get_error_summary()
        click.echo(f"\n⚠ {error_summary['total_errors']} errors logged")
        for code, count in error_summary['errors_by_code'].items():
            click.echo(f"  {code}: {count}")


@cli.command()
@click.argument('category', required=False)
@click.pass_context
def summary(ctx, category):
    """Show totals per category, or recent transactions of one category"""

    cli_instance = ctx.obj['cli']
    handler = cli_instance.handler

    command = handler.command_prefix
    if category:
        command = f"{command} {category}"

    click.echo(handler.handle_summary_command(command))


@cli.command()
@click.argument('output_path', default='tracker_config.json')
@click.option('--format', type=click.Choice(['json', 'yaml']), default='json', help='Configuration file format')
@click.pass_context
def init_config(ctx, output_path, format):
    """Generate configuration template file"""

    cli_instance = ctx.obj['cli']

    # Adjust extension based on format
    if format == 'yaml' and not output_path.endswith(('.yml', '.yaml')):
        output_path = output_path.replace('.json', '.yml')
    elif format == 'json' and not output_path.endswith('.json'):
        output_path = output_path.replace('.yml', '.json').replace('.yaml', '.json')

    try:
        cli_instance.config_manager.save_config_template(output_path)
    except OSError as e:
        click.echo(f"✗ Error generating config template: {e}")
        sys.exit(1)

    click.echo(f"✓ Configuration template generated: {output_path}")
    click.echo("  Edit the file to change categories, storage and retry settings")


@cli.command()
@click.option('--env-file', type=click.Path(dir_okay=False), help='Path to a .env file')
def check_env(env_file):
    """Verify the bot token and channel id are configured"""

    try:
        settings = load_bot_settings(env_file)
    except ConfigurationError as e:
        click.echo(f"✗ {e}")
        click.echo(f"  Set {BOT_TOKEN_ENV} and {CHANNEL_ID_ENV} in the environment or a .env file")
        sys.exit(1)

    click.echo("✓ Bot settings found")
    click.echo(f"  Channel: {settings.channel_id}")


def main():
    cli(obj={})


if __name__ == '__main__':
    main()
