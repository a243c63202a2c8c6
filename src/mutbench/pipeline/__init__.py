"""Table slicing, difficulty filters, mutation model, and mutant strategies."""
