"""Infrastructure layer — filesystem, network, task graph, dev server.

This layer depends on stdlib and third-party libs (wcmatch, requests,
NetworkX, livereload). It must never import from services, commands, or
output. The service layer bridges between domain values and infrastructure.
"""
