"""Feed assembly over a merchant snapshot."""
from merchant_feed.services.feed.assembler import FeedAssembler, assemble_feed

__all__ = ["FeedAssembler", "assemble_feed"]
