# G-Key Service Contracts

"""
G-Key Service Contract Module

Models and test data factory shared by the unit, component and API tests.
"""
