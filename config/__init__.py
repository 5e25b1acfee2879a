"""Configuration package for the product scraper."""
