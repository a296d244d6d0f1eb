"""
Generated staff directory. Do not edit by hand.

Regenerate with: python -m staff_relay.scripts.build_directory <staff.json> --output <this file>
"""
from types import MappingProxyType

STAFF_BY_ID = MappingProxyType({
})
