#!/usr/bin/env python3
"""
Lords Staking Dashboard Application

Main entry point: wires the cache, the marketplace and staking contract
clients, the staking data service and the FastAPI web server together.
"""

import asyncio
import signal
import sys
from pathlib import Path

from dotenv import load_dotenv

from lordsboard.staking.cache import CacheStore
from lordsboard.staking.graphql import MarketplaceClient
from lordsboard.staking.rpc import StakingContractClient
from lordsboard.staking.service import StakingDataService
from lordsboard.utils.config import load_config
from lordsboard.utils.logger import get_logger
from lordsboard.web_server import DashboardWebServer

# Load .env from the project root
load_dotenv(Path(__file__).parent.parent / '.env')

logger = get_logger(__name__)


class DashboardApp:
    """Dashboard application.

    Builds the data clients, the cached staking service and the web server,
    runs until SIGINT/SIGTERM and then shuts everything down.
    """

    def __init__(self, config=None):
        self.config = config if config is not None else load_config()
        self.cache = None
        self.marketplace = None
        self.staking_contract = None
        self.service = None
        self.web_server = None
        self.running = True

        self._setup_signal_handlers()

        logger.info("Lords staking dashboard initialized")

    def _setup_signal_handlers(self):
        signal.signal(signal.SIGINT, self._handle_signal)
        signal.signal(signal.SIGTERM, self._handle_signal)

    def _handle_signal(self, signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        self.running = False

    def _display_config_summary(self):
        """Display key configuration options for diagnostics."""
        logger.info("=" * 60)
        logger.info("CONFIGURATION SUMMARY")
        logger.info("=" * 60)

        graphql_config = self.config.get('graphql', {})
        logger.info(f"GraphQL endpoint: {graphql_config.get('endpoint', 'default')}")

        rpc_config = self.config.get('rpc', {})
        logger.info(f"RPC URL: {rpc_config.get('url', 'default')}")
        logger.info(f"Staking contract: {rpc_config.get('staking_contract', 'default')}")

        cache_config = self.config.get('cache', {})
        logger.info(f"Page TTL: {cache_config.get('page_ttl', 86400)}s")
        logger.info(f"Admin key: {'configured' if cache_config.get('api_key') else 'not configured'}")

        server_config = self.config.get('server', {})
        logger.info(f"Server Host: {server_config.get('host', '0.0.0.0')}")
        logger.info(f"Server Port: {server_config.get('port', 6080)}")

        logger.info("=" * 60)

    def initialize(self):
        """Create the cache, data clients, service and web server."""
        self._display_config_summary()

        cache_config = self.config.get('cache', {})
        self.cache = CacheStore(default_ttl=int(cache_config.get('page_ttl', 86400)))
        self.marketplace = MarketplaceClient(self.config)
        self.staking_contract = StakingContractClient(self.config)
        self.service = StakingDataService(self.config, self.cache, self.marketplace, self.staking_contract)
        self.web_server = DashboardWebServer(self.config, self.service, self.cache)

        logger.info("Application initialization completed")

    async def start(self):
        """Start the web server and run until a shutdown signal is received."""
        try:
            self.initialize()

            server_host = self.config.get('server', {}).get('host', '0.0.0.0')
            server_port = int(self.config.get('server', {}).get('port', 6080))

            logger.info(f"Starting web server on {server_host}:{server_port}...")
            server_task = asyncio.create_task(self.web_server.start(host=server_host, port=server_port))
            # Give the server a moment to bind; a failed bind finishes the task
            await asyncio.sleep(0.2)
            if server_task.done() and server_task.exception():
                raise server_task.exception()

            logger.info(f"API available at http://{server_host}:{server_port}/api/")

            while self.running and not server_task.done():
                await asyncio.sleep(1)

            logger.info("Shutdown signal received, stopping application...")
        finally:
            await self.stop()

    async def stop(self):
        """Stop all services and release resources; safe to call twice."""
        logger.info("Stopping lords staking dashboard")
        self.running = False

        if self.web_server:
            try:
                await self.web_server.stop()
            except Exception as e:
                logger.error(f"Error stopping web server: {e}")

        if self.marketplace:
            self.marketplace.close()

        if self.cache:
            self.cache.clear()

        logger.info("Lords staking dashboard stopped")


async def main():
    app = DashboardApp()
    try:
        await app.start()
    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
    except Exception:
        logger.exception("Application failed")
        sys.exit(1)


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
