"""
Downstream lookup agent clients

HTTP clients for the knowledge base, product, price and synonym agents.
"""

from ticket_manager.agents.knowledge import KnowledgeAgentClient
from ticket_manager.agents.product import ProductAgentClient, is_multi_product_query
from ticket_manager.agents.price import PriceAgentClient
from ticket_manager.agents.synonym import SynonymAgentClient

__all__ = [
    "KnowledgeAgentClient",
    "ProductAgentClient",
    "PriceAgentClient",
    "SynonymAgentClient",
    "is_multi_product_query",
]
