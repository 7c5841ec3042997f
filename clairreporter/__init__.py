"""clair-reporter: file tracker tickets for container vulnerability findings."""
