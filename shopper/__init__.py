"""Grama Groceries shopper state: auth session, cart and app preferences"""
