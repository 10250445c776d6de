"""Core system components"""

from .state import AppState, MediaFile, ProductContext, ScriptState
# Don't import workflow here to avoid circular imports
# from .workflow import *

__all__ = ['AppState', 'MediaFile', 'ProductContext', 'ScriptState']
