from .auth_context import AuthContext, AuthError, SIGNED_IN, SIGNED_OUT, INITIAL_SESSION

__all__ = ['AuthContext', 'AuthError', 'SIGNED_IN', 'SIGNED_OUT', 'INITIAL_SESSION']
