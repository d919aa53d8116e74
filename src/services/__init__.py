"""Service layer for the USPS response core.

Provides size-limit parsing, package validation, response parsing, and
rate/tracking extraction. Import from the individual modules; this
package does not re-export so that src.models can depend on
src.services.usps_constants without an import cycle.
"""
