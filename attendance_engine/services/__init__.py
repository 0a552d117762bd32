"""
Service layer: roster resolution, filter state, attendance queries,
consolidation and report rendering.
"""
