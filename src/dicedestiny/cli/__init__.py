"""Command line interface for Dice Destiny."""
