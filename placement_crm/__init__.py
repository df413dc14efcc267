"""
Placement CRM
Backend for a student-placement agency.

Facilities, facility supervisors, placement executives, trainers and
students are each created as one aggregate: the root record, its child
records and an optional login account are written in a single
transaction, so a failure part way leaves nothing behind.
"""

__version__ = "1.0.0"
