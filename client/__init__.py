from client.session_agent import AuthRequestFailed, ReauthenticationRequired, SessionAgent

__all__ = ["AuthRequestFailed", "ReauthenticationRequired", "SessionAgent"]
