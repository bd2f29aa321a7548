# Together AI Image MCP Server
# Copyright (C) 2025 brokechubb
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

from config import TOGETHER_API_KEY, LOG_LEVEL, LOG_TO_FILE, LOG_FILE_PATH
from ai.exceptions.together_exceptions import TogetherError
from tools.image_tool_server import ImageToolServer
from utils.logging_config import setup_logging
import asyncio
import signal
import sys
import logging

# Get logger for main module
logger = logging.getLogger(__name__)

def setup_signal_handlers():
    """Route SIGTERM through the same KeyboardInterrupt path as SIGINT"""
    signal.signal(signal.SIGINT, signal.default_int_handler)
    signal.signal(signal.SIGTERM, signal.default_int_handler)

async def serve(server):
    try:
        await server.run()
    finally:
        await server.close()

def main():
    """Main entry point: check configuration, then serve MCP over stdio"""
    # All log output goes to stderr; stdout belongs to the MCP transport
    setup_logging(LOG_LEVEL, log_to_file=LOG_TO_FILE, log_file_path=LOG_FILE_PATH)

    if not TOGETHER_API_KEY:
        logger.error("❌ TOGETHER_API_KEY environment variable is required. Please check your .env file.")
        sys.exit(1)

    try:
        server = ImageToolServer()
    except TogetherError as e:
        logger.error(f"💀 Failed to initialize server: {e}")
        sys.exit(1)

    setup_signal_handlers()

    try:
        asyncio.run(serve(server))
    except KeyboardInterrupt:
        logger.info("🛑 Received shutdown signal, transport closed")

    sys.exit(0)

if __name__ == "__main__":
    main()
