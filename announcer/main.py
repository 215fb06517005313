import argparse
import asyncio
import sys
from typing import Optional

import aiohttp

from announcer.config import Config, parse_bool
from announcer.database.database import Database
from announcer.services.ctfd_client import CTFdClient
from announcer.services.leaderboard_reconciler import LeaderboardReconciler
from announcer.services.leaderboard_store import LeaderboardStore
from announcer.services.notifier import WebhookNotifier
from announcer.services.solve_reconciler import SolveReconciler
from announcer.services.solve_store import SolveStore
from announcer.utils.exceptions import ConfigError, StorageError, UpstreamError
from announcer.utils.logger import setup_logger

class Announcer:
    """Polls CTFd and announces new solves and top-N overtakes."""

    def __init__(self, settings=Config, database: Optional[Database] = None, client=None, notifier=None):
        """
        Args:
            settings: Object with the Config attributes, validated already
            database: Database to use instead of one built from DATABASE_URL
            client: CTFd client to use instead of CTFdClient
            notifier: Notifier to use instead of WebhookNotifier
        """
        self.settings = settings
        self.db = database
        self.client = client
        self.notifier = notifier
        self.http_session: Optional[aiohttp.ClientSession] = None
        self.solve_reconciler: Optional[SolveReconciler] = None
        self.leaderboard_reconciler: Optional[LeaderboardReconciler] = None
        self.logger = setup_logger(__name__)
        self._seeded = not settings.SKIP_EXISTING_SOLVES_ON_STARTUP
        self._stopping = asyncio.Event()

    async def setup(self):
        """Open the database and HTTP session and wire up the reconcilers"""
        self.logger.info("Setting up CTFd announcer...")

        if self.db is None:
            self.db = Database(self.settings.DATABASE_URL)
        await self.db.initialize()

        if self.client is None or self.notifier is None:
            self.http_session = aiohttp.ClientSession()
        if self.client is None:
            self.client = CTFdClient(
                self.settings.CTFD_URL,
                self.settings.CTFD_API_KEY,
                self.http_session,
                account_type=self.settings.CTFD_ACCOUNT_TYPE,
                timeout=self.settings.REQUEST_TIMEOUT_SECONDS
            )
        if self.notifier is None:
            self.notifier = WebhookNotifier(self.settings.WEBHOOK_URL, self.http_session)

        self.solve_reconciler = SolveReconciler(
            SolveStore(self.db.session_factory),
            self.notifier,
            announce_first_blood_only=self.settings.ANNOUNCE_FIRST_BLOOD_ONLY
        )
        self.leaderboard_reconciler = LeaderboardReconciler(
            LeaderboardStore(self.db.session_factory),
            self.notifier,
            self.client,
            top_n=self.settings.TOP_N
        )

        self.logger.info("CTFd announcer setup complete!")

    async def run_cycle(self):
        """
        Run one reconciliation cycle.

        A CTFd or database failure ends the cycle early; the next cycle
        starts over from fresh data.
        """
        try:
            board = await self.client.get_solve_board()

            if not self._seeded:
                await self.solve_reconciler.seed(board)
                self._seeded = True

            events = await self.solve_reconciler.reconcile(board)
            if events:
                self.logger.info(f"Announced {len(events)} new solves")

            if self.settings.ANNOUNCE_OVERTAKES:
                snapshot = await self.client.get_top(self.settings.TOP_N)
                overtakes = await self.leaderboard_reconciler.reconcile(snapshot)
                if overtakes:
                    self.logger.info(f"Announced {len(overtakes)} leaderboard changes")
        except UpstreamError as e:
            self.logger.warning(f"Skipping rest of cycle, CTFd request to {e.endpoint} failed: {e.details}")
        except StorageError as e:
            self.logger.error(f"Skipping rest of cycle, database {e.operation} failed: {e.details}")

    async def run_forever(self):
        """Run cycles back to back with a fixed delay until stop() is called"""
        self.logger.info(f"Polling {self.settings.CTFD_URL} every {self.settings.REFRESH_INTERVAL_SECONDS}s")
        while not self._stopping.is_set():
            try:
                await self.run_cycle()
            except Exception as e:
                self.logger.error(f"Unexpected error in poll cycle: {e}", exc_info=True)

            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.settings.REFRESH_INTERVAL_SECONDS)
            except asyncio.TimeoutError:
                pass

    def stop(self):
        self._stopping.set()

    async def close(self):
        """Cleanup when shutting down"""
        self.logger.info("Shutting down CTFd announcer...")

        if self.http_session:
            await self.http_session.close()

        if self.db:
            await self.db.close()

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="A Discord webhook bot to announce CTFd solves and top-N overtakes"
    )
    parser.add_argument('-w', '--webhook-url', help="Discord webhook URL (env WEBHOOK_URL)")
    parser.add_argument('-c', '--ctfd-url', help="CTFd URL (env CTFD_URL)")
    parser.add_argument('-a', '--ctfd-api-key', help="CTFd API key (env CTFD_API_KEY)")
    parser.add_argument('--announce-first-blood-only', metavar='BOOL',
                        help="Only announce first bloods (default true)")
    parser.add_argument('-s', '--skip-existing-solves', metavar='BOOL',
                        help="Do not announce solves that exist at startup (default true)")
    parser.add_argument('--announce-overtakes', metavar='BOOL',
                        help="Announce top-N overtakes (default true)")
    parser.add_argument('-r', '--refresh-interval-seconds', type=int,
                        help="Delay between polls in seconds (default 5)")
    parser.add_argument('--top-n', type=int, help="Size of the tracked leaderboard (default 10)")
    parser.add_argument('--ctfd-account-type', choices=Config.ACCOUNT_TYPES,
                        help="Whether the CTF is played in teams or as users (default teams)")
    parser.add_argument('--database-url', help="SQLAlchemy database URL (env DATABASE_URL)")
    return parser

def apply_args(args: argparse.Namespace, settings=Config):
    """Override settings with any flags given on the command line"""
    overrides = {
        'WEBHOOK_URL': args.webhook_url,
        'CTFD_URL': args.ctfd_url,
        'CTFD_API_KEY': args.ctfd_api_key,
        'REFRESH_INTERVAL_SECONDS': args.refresh_interval_seconds,
        'TOP_N': args.top_n,
        'CTFD_ACCOUNT_TYPE': args.ctfd_account_type,
        'DATABASE_URL': args.database_url,
    }
    if args.announce_first_blood_only is not None:
        overrides['ANNOUNCE_FIRST_BLOOD_ONLY'] = parse_bool(args.announce_first_blood_only, '--announce-first-blood-only')
    if args.skip_existing_solves is not None:
        overrides['SKIP_EXISTING_SOLVES_ON_STARTUP'] = parse_bool(args.skip_existing_solves, '--skip-existing-solves')
    if args.announce_overtakes is not None:
        overrides['ANNOUNCE_OVERTAKES'] = parse_bool(args.announce_overtakes, '--announce-overtakes')

    for name, value in overrides.items():
        if value is not None:
            setattr(settings, name, value)

async def main(argv=None) -> int:
    """Main entry point"""
    logger = setup_logger(__name__)
    logger.info("Starting CTFd Discord Solve Announcer")

    try:
        apply_args(build_parser().parse_args(argv))
        Config.validate()
    except ConfigError as e:
        logger.error(str(e))
        return 2

    announcer = Announcer()
    try:
        await announcer.setup()
        await announcer.run_forever()
    except (ConfigError, StorageError) as e:
        logger.error(f"Fatal error: {e}")
        return 1
    finally:
        await announcer.close()
    return 0

def run():
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass

if __name__ == "__main__":
    run()
