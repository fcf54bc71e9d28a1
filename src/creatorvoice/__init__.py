"""creatorvoice - distill a creator's short-form catalog into script templates."""

__version__ = "0.1.0"
