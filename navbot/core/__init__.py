"""
Navbot core: foundation types, navigation engine and persistence.
"""
