"""Application context for explicit state passing.

The UI layer builds one AppContext at startup and hands it to whatever
needs the player or the stores, instead of reaching for module globals.
"""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from tera.core.config import (
    Config,
    get_blocklist_path,
    get_voted_stations_path,
    load_config,
)
from tera.domain.blocklist.manager import BlocklistManager
from tera.domain.playback.player import StreamPlayer
from tera.domain.voting.tracker import VoteTracker


@dataclass
class AppContext:
    """The player and stores for one running Tera instance.

    Attributes:
        config: Application configuration
        player: mpv supervisor
        blocklist: Blocked stations and block rules
        votes: Vote history
    """

    config: Config
    player: StreamPlayer
    blocklist: BlocklistManager
    votes: VoteTracker

    @classmethod
    def create(cls, config: Optional[Config] = None) -> "AppContext":
        """Build the components and load both stores from disk.

        Raises:
            PersistenceReadError: A store file could not be read
            DocumentParseError: A store file is malformed
        """
        config = config or load_config()

        blocklist = BlocklistManager(get_blocklist_path(config))
        blocklist.load()

        votes = VoteTracker(get_voted_stations_path(config))
        votes.load()

        logger.info(
            f"Context ready: {blocklist.count()} blocked, {votes.count()} voted"
        )
        return cls(
            config=config,
            player=StreamPlayer(config.player),
            blocklist=blocklist,
            votes=votes,
        )

    def shutdown(self) -> None:
        """Stop playback so no mpv process outlives the app."""
        self.player.stop()
