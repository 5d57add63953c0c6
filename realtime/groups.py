# Channels group name must match ^[A-Za-z0-9._-]+$ and be < 100 chars. Use dot as separator to avoid ':'.
PUBLIC_FEED_GROUP = "feed.public"
