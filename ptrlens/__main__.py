"""
PTRLens - Bulk Reverse DNS Tool

Entry point for running as a module:
    cat ips.txt | python -m ptrlens -r 1.1.1.1
"""

from .cli import main

if __name__ == '__main__':
    main()
