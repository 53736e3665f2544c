"""Demo service protected by AKSK authentication."""
