"""AGENTS document model.

Layout of a managed document:

    free text (kept verbatim)
    <!-- prime-agent(Start name) -->
    ## name
    section content, verbatim
    <!-- prime-agent(End name) -->
    more free text

Sections never nest. Anything outside a marker pair is free text.
"""
