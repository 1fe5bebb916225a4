"""Slotbook: appointment availability and booking engine for salons and barbershops."""
