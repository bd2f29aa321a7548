#!/usr/bin/env python3
"""
Test runner for the Together AI image server tests
"""

import argparse
import unittest
import sys
import os

# Add the project root to the path so we can import modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

def run_all_tests(pattern='test_*.py', verbosity=2):
    """Discover and run tests in the tests directory matching pattern"""
    loader = unittest.TestLoader()
    start_dir = os.path.dirname(os.path.abspath(__file__))
    suite = loader.discover(start_dir, pattern=pattern)

    result = unittest.TextTestRunner(verbosity=verbosity).run(suite)

    return 0 if result.wasSuccessful() else 1

if __name__ == '__main__':
    parser = argparse.ArgumentParser(description="Run the image server test suite")
    parser.add_argument('-p', '--pattern', default='test_*.py', help="test module glob")
    parser.add_argument('-q', '--quiet', action='store_true', help="only report failures")
    args = parser.parse_args()

    sys.exit(run_all_tests(args.pattern, verbosity=0 if args.quiet else 2))
