from firebase_admin import firestore_async, get_app, initialize_app


def init_firebase(project_id: str | None = None) -> None:
    """Initialize Firebase Admin SDK (idempotent).

    Uses GOOGLE_APPLICATION_CREDENTIALS environment variable for credentials.
    """
    try:
        get_app()
    except ValueError:
        options = {"projectId": project_id} if project_id else None
        initialize_app(options=options)


def get_firestore_client():
    """Return the async Firestore client bound to the default Firebase app."""
    init_firebase()
    return firestore_async.client()
