"""OMCISight — reconstruct OMCI exchanges from protocol-analyzer text exports."""

from omcisight.parsers.pipeline import parse

__all__ = ["parse"]
