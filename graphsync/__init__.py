"""Mirror property-graph mutations into a search index."""
