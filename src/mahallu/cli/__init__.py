"""Command-line interface for the Mahallu bank ledger."""
