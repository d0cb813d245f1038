"""Registry clients: GraphQL transport, errors and the orb registry API."""
