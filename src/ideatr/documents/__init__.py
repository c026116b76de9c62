"""Structured idea documents and the relation cache between them.

Layout of a vault:
    <root>/
    └── Ideas/
        └── 2026-02-18-solar-kettle.md   # metadata block + prose body

A document:
    ---
    kind: idea
    status: captured
    createdDate: 2026-02-18
    id: 17713728000001234
    category:
    tags: []
    relatedIds: [17713728000005678]
    domainChecks: []
    existenceChecks: []
    ---

    Solar kettle for camping.

    ## Scaffold
    ...

Modules:
    model       MetadataRecord / Document / DocumentEntry
    codec       metadata block parse / build / validate / in-place update
    sections    ``## label`` section locate and merge
    store       read + rewrite operations over a storage collaborator
    repository  storage protocols and the file-system vault
    relations   RelationCache (id <-> path/title)
    ids         id generation and assignment
    migration   legacy block and path-based relatedIds upgrades
    naming      filenames and content for new documents
"""
