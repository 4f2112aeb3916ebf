"""
Classifieds app for SafraReport.

Clasificados priced in Dominican pesos, moderated before they are listed.
"""
