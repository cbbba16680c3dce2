"""
Paczki - backend listy życzeń dla zwierząt ze schronisk.
"""

__version__ = "1.0.0"
