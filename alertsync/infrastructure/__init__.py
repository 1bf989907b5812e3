"""Infrastructure adapters: database, REST client, push channel and alerts."""
