"""mint_announcer - announces ERC-721 mints to Discord channels."""

__version__ = "0.1.0"
