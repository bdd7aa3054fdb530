"""
DecisionLog: decision tracking for team chat
"""
__version__ = "0.1.0"
