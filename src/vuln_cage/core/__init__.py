"""Version algebra, advisory matching and scan orchestration."""
