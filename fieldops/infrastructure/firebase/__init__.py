"""Firestore (REST) client, collection names and repositories."""
