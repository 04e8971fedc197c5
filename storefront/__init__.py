"""Grama Groceries storefront service"""
