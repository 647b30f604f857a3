"""
Workflow State Engine

Reusable workflow definitions made of states and actions, with independent
instances that move through them under validated transition rules.
"""

__version__ = "1.0.0"
