"""
GraphQL documents sent to the Fly.io GraphQL endpoint.
"""

APP_FIELDS = """
    name
    status
    organization {
      name
      slug
    }
    ipAddresses {
      nodes {
        type
        region
        address
      }
    }
    machines {
      nodes {
        id
        name
        state
        region
      }
    }
"""

GET_ORGANIZATION_APPS = (
    """query($slug: String!) {
  organization(slug: $slug) {
    apps {
      nodes {"""
    + APP_FIELDS
    + """      }
    }
  }
}"""
)

GET_APP = (
    """query($name: String!) {
  app(name: $name) {"""
    + APP_FIELDS
    + """  }
}"""
)

GET_ORGANIZATION = """query($slug: String!) {
  organization(slug: $slug) {
    id
    slug
    name
    type
    viewerRole
  }
}"""

RELEASE_FIELDS = """
    release {
      id
      version
      reason
      description
      user {
        id
        email
        name
      }
      evaluationId
      createdAt
    }
"""

SET_SECRETS = (
    """mutation($input: SetSecretsInput!) {
  setSecrets(input: $input) {"""
    + RELEASE_FIELDS
    + """  }
}"""
)

UNSET_SECRETS = (
    """mutation($input: UnsetSecretsInput!) {
  unsetSecrets(input: $input) {"""
    + RELEASE_FIELDS
    + """  }
}"""
)

ALLOCATE_IP_ADDRESS = """mutation($input: AllocateIPAddressInput!) {
  allocateIpAddress(input: $input) {
    ipAddress {
      id
      address
      type
      region
      createdAt
    }
  }
}"""

RELEASE_IP_ADDRESS = """mutation($input: ReleaseIPAddressInput!) {
  releaseIpAddress(input: $input) {
    app {
      name
    }
  }
}"""

GET_REGIONS = """query {
  platform {
    requestRegion
    regions {
      name
      code
      latitude
      longitude
      gatewayAvailable
      requiresPaidPlan
    }
  }
}"""
