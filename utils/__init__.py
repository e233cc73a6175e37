"""Utility helpers shared by the engine and the API.

Submodules:
    logging          – JSON formatter, get_logger(), log_execution_time().
"""
