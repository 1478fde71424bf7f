"""Registry provider adapters (mcpm, mozilla-ai) and the argument classifier."""
