# Local persistence
from racli.store.key_store import KeyStore as KeyStore
from racli.store.post_store import PostStore as PostStore
from racli.store.session_store import SessionStore as SessionStore

__all__ = ["KeyStore", "PostStore", "SessionStore"]
