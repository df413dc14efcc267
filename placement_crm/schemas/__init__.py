"""
Schemas module - Request/Response schemas for API endpoints.

Request schemas validate what the API accepts; services reuse them through
`parse_payload`, which reports problems as the domain ValidationError.
"""

from placement_crm.schemas.schemas import ApiResponse, describe_errors, parse_payload

__all__ = ["ApiResponse", "describe_errors", "parse_payload"]
