"""
IPM Gateway - Proposal Approval Workflow Service

A FastAPI-based microservice that moves monetary proposals through a
multi-step approval chain and distributes every state transition as an
event to independent downstream consumer groups.
"""

__version__ = "0.1.0"
