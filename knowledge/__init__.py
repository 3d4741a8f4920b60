"""
MRONJ Risk knowledge base.

Contains the clinical content the assessment draws on:
- Procedure recommendations per risk tier
- Literature citations
- Patient education text
- Detailed treatment guidance and the pre-treatment checklist (guidance/*.yaml)
"""
