"""HTTP and websocket API exposing the notification session."""
