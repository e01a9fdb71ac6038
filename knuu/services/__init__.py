"""
Services Module

Key Submodules:
- orchestration: cluster resources of test instances (Kubernetes)
- image_resolver: image reference an instance runs
- cloner: copies of an instance under a new identity
- file_staging / builder: files added to an instance's image
"""
