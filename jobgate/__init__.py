"""
Jobgate - Secure External Job Execution

Launches external big-data jobs (Spark applications, Sqoop imports) as
child processes, optionally authenticating against a Kerberos-secured
Hadoop cluster first, and reports a single success/failure outcome per job.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- credentials: Encrypted password resolution
- builder: Sqoop command and Spark launch spec construction
- security: Kerberos security gate
- executor: Process orchestration and outcome routing
- api: Job definition models
"""

__version__ = "1.0.0"
