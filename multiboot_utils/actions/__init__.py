"""Actions invoked by the command line dispatcher."""
