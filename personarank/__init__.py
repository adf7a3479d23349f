"""
PersonaRank Chat

Chat service that simulates several model personas through a hosted
generative model, ranks their answers and returns the best one.
"""

__version__ = "0.1.0"
