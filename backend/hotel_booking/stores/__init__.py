"""
Persistence layer: abstract stores and their SQLAlchemy implementations.
"""

from .interfaces import BookingStore, EnrollmentRepository, RoomRepository, TicketRepository

__all__ = ['BookingStore', 'EnrollmentRepository', 'RoomRepository', 'TicketRepository']
