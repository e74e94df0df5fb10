"""Platform adapters and the concurrent aggregator."""
