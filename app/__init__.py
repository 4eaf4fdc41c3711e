"""
Veteran Job Marketplace
Connects military veterans with employers.

Architecture:
- MongoDB: accounts, companies, jobs, applications, resumes, messages
- Matching: rule-based 0-100 score from MOS, clearance, skills and location
- Resume parsing: keyword/regex extraction of a military service record
"""

__version__ = "1.0.0"
